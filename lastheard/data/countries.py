"""
Country and continent lookup tables for Brandmeister talkgroups.

Talkgroup ids follow the ITU-T E.212 mobile country code numbering used by
DMR-MARC and Brandmeister: the leading digits of a national or regional
talkgroup identify its country. TALKGROUP_PREFIXES holds 2, 3 and 4 digit
prefixes; callers try the longest prefix first.
"""

GLOBAL = "Global"
UNKNOWN = "Unknown"

# Country / region code -> display name
COUNTRY_NAMES = {
    "WW": "Worldwide",
    "Global": "Global",
    "EU": "Europe",
    "OC": "Oceania",
    "AS": "Asia",
    # Europe
    "GB": "United Kingdom", "DE": "Germany", "FR": "France", "ES": "Spain",
    "IT": "Italy", "NL": "Netherlands", "BE": "Belgium", "CH": "Switzerland",
    "AT": "Austria", "PL": "Poland", "CZ": "Czech Republic", "SE": "Sweden",
    "NO": "Norway", "DK": "Denmark", "FI": "Finland", "PT": "Portugal",
    "GR": "Greece", "HU": "Hungary", "RO": "Romania", "BG": "Bulgaria",
    "HR": "Croatia", "SI": "Slovenia", "SK": "Slovakia", "LT": "Lithuania",
    "LV": "Latvia", "EE": "Estonia", "IE": "Ireland", "LU": "Luxembourg",
    "MT": "Malta", "CY": "Cyprus", "IS": "Iceland", "AL": "Albania",
    "MK": "North Macedonia", "RS": "Serbia", "BA": "Bosnia and Herzegovina",
    "ME": "Montenegro", "XK": "Kosovo", "MD": "Moldova", "UA": "Ukraine",
    "BY": "Belarus", "RU": "Russia", "AD": "Andorra", "FO": "Faroe Islands",
    "LI": "Liechtenstein", "SM": "San Marino",
    # Asia and Middle East
    "TR": "Turkey", "IL": "Israel", "SA": "Saudi Arabia",
    "AE": "United Arab Emirates", "QA": "Qatar", "KW": "Kuwait", "OM": "Oman",
    "BH": "Bahrain", "JO": "Jordan", "LB": "Lebanon", "SY": "Syria",
    "IQ": "Iraq", "IR": "Iran", "PK": "Pakistan", "IN": "India",
    "BD": "Bangladesh", "LK": "Sri Lanka", "NP": "Nepal", "AF": "Afghanistan",
    "MM": "Myanmar", "TH": "Thailand", "VN": "Vietnam", "LA": "Laos",
    "KH": "Cambodia", "MY": "Malaysia", "SG": "Singapore", "ID": "Indonesia",
    "PH": "Philippines", "BN": "Brunei", "TL": "East Timor", "CN": "China",
    "TW": "Taiwan", "HK": "Hong Kong", "MO": "Macau", "KR": "South Korea",
    "KP": "North Korea", "JP": "Japan", "MN": "Mongolia", "AM": "Armenia",
    "AZ": "Azerbaijan", "GE": "Georgia", "KZ": "Kazakhstan",
    # Oceania
    "AU": "Australia", "NZ": "New Zealand", "FJ": "Fiji",
    "PG": "Papua New Guinea", "NC": "New Caledonia", "WS": "Samoa",
    "TO": "Tonga", "VU": "Vanuatu", "SB": "Solomon Islands",
    # North and Central America, Caribbean
    "US": "United States", "CA": "Canada", "MX": "Mexico", "GT": "Guatemala",
    "BZ": "Belize", "SV": "El Salvador", "HN": "Honduras", "NI": "Nicaragua",
    "CR": "Costa Rica", "PA": "Panama", "BS": "Bahamas", "CU": "Cuba",
    "CW": "Curaçao", "DO": "Dominican Republic", "GD": "Grenada", "HT": "Haiti",
    "JM": "Jamaica", "LC": "Saint Lucia", "PR": "Puerto Rico",
    "TC": "Turks and Caicos Islands", "TT": "Trinidad and Tobago",
    # South America
    "BR": "Brazil", "AR": "Argentina", "CL": "Chile", "CO": "Colombia",
    "VE": "Venezuela", "PE": "Peru", "EC": "Ecuador", "BO": "Bolivia",
    "PY": "Paraguay", "UY": "Uruguay", "GY": "Guyana", "SR": "Suriname",
    "GF": "French Guiana",
    # Africa
    "EG": "Egypt", "DZ": "Algeria", "MA": "Morocco", "TN": "Tunisia",
    "LY": "Libya", "SD": "Sudan", "SS": "South Sudan", "ET": "Ethiopia",
    "SO": "Somalia", "KE": "Kenya", "UG": "Uganda", "TZ": "Tanzania",
    "RW": "Rwanda", "BI": "Burundi", "DJ": "Djibouti", "ER": "Eritrea",
    "MG": "Madagascar", "MU": "Mauritius", "KM": "Comoros", "SC": "Seychelles",
    "ZA": "South Africa", "NA": "Namibia", "BW": "Botswana", "ZW": "Zimbabwe",
    "ZM": "Zambia", "MW": "Malawi", "MZ": "Mozambique", "AO": "Angola",
    "CD": "Democratic Republic of the Congo", "CG": "Republic of the Congo",
    "CF": "Central African Republic", "TD": "Chad", "CM": "Cameroon",
    "GQ": "Equatorial Guinea", "GA": "Gabon", "ST": "Sao Tome and Principe",
    "GH": "Ghana", "NG": "Nigeria", "BJ": "Benin", "TG": "Togo",
    "BF": "Burkina Faso", "CI": "Ivory Coast", "LR": "Liberia",
    "SL": "Sierra Leone", "GN": "Guinea", "GW": "Guinea-Bissau",
    "GM": "Gambia", "SN": "Senegal", "MR": "Mauritania", "ML": "Mali",
    "NE": "Niger", "RE": "Réunion",
}

_CONTINENT_MEMBERS = {
    "Global": ["WW", "Global"],
    "Europe": [
        "EU", "GB", "DE", "FR", "ES", "IT", "NL", "BE", "CH", "AT", "PL", "CZ",
        "SE", "NO", "DK", "FI", "PT", "GR", "HU", "RO", "BG", "HR", "SI", "SK",
        "LT", "LV", "EE", "IE", "LU", "MT", "CY", "IS", "AL", "MK", "RS", "BA",
        "ME", "XK", "MD", "UA", "BY", "RU", "AD", "FO", "LI", "SM",
    ],
    "Asia": [
        "AS", "AF", "TR", "IL", "AE", "QA", "KW", "OM", "BH", "JO", "LB", "SY",
        "IQ", "IR", "PK", "IN", "BD", "LK", "NP", "MM", "TH", "VN", "LA", "KH",
        "MY", "SG", "ID", "PH", "BN", "TL", "CN", "TW", "HK", "MO", "KR", "KP",
        "JP", "MN", "AM", "AZ", "GE", "KZ",
    ],
    "Oceania": ["OC", "AU", "NZ", "FJ", "PG", "NC", "WS", "TO", "VU", "SB"],
    "North America": [
        "US", "CA", "MX", "GT", "BZ", "SV", "HN", "NI", "CR", "PA", "BS", "CU",
        "CW", "DO", "GD", "HT", "JM", "LC", "PR", "TC", "TT",
    ],
    "South America": [
        "SA", "BR", "AR", "CL", "CO", "VE", "PE", "EC", "BO", "PY", "UY", "GY",
        "SR", "GF",
    ],
    "Africa": [
        "NA", "EG", "DZ", "MA", "TN", "LY", "SD", "SS", "ET", "SO", "KE", "UG",
        "TZ", "RW", "BI", "DJ", "ER", "MG", "MU", "KM", "SC", "ZA", "BW", "ZW",
        "ZM", "MW", "MZ", "AO", "CD", "CG", "CF", "TD", "CM", "GQ", "GA", "ST",
        "GH", "NG", "BJ", "TG", "BF", "CI", "LR", "SL", "GN", "GW", "GM", "SN",
        "MR", "ML", "NE", "RE",
    ],
}

# Country / region code -> continent
COUNTRY_TO_CONTINENT = {
    code: continent
    for continent, codes in _CONTINENT_MEMBERS.items()
    for code in codes
}

# Talkgroup id prefix -> country code
TALKGROUP_PREFIXES = {
    # Europe
    "202": "GR", "204": "NL", "206": "BE", "208": "FR", "213": "AD",
    "214": "ES", "216": "HU", "218": "BA", "219": "HR", "220": "RS",
    "222": "IT", "226": "RO", "228": "CH", "230": "CZ", "231": "SK",
    "232": "AT", "235": "GB", "238": "DK", "240": "SE", "242": "NO",
    "244": "FI", "246": "LT", "247": "LV", "248": "EE", "255": "UA",
    "259": "MD", "260": "PL", "262": "DE", "263": "DE", "264": "DE",
    "265": "DE", "268": "PT", "270": "LU", "272": "IE", "274": "IS",
    "276": "AL", "278": "MT", "280": "CY", "282": "GE", "283": "AM",
    "284": "BG", "286": "TR", "288": "FO", "292": "SM", "293": "SI",
    "294": "MK", "295": "LI", "297": "ME",
    # North America and Caribbean
    "302": "CA", "310": "US", "311": "US", "312": "US", "313": "US",
    "314": "US", "315": "US", "316": "US", "317": "US", "318": "US",
    "319": "US", "330": "PR", "334": "MX", "338": "JM", "352": "GD",
    "358": "LC", "362": "CW", "364": "BS", "368": "CU", "370": "DO",
    "372": "HT", "374": "TT", "376": "TC",
    # Asia, Middle East and Oceania
    "400": "AZ", "401": "KZ", "404": "IN", "410": "PK", "415": "LB",
    "420": "SA", "422": "OM", "425": "IL", "426": "BH", "427": "QA",
    "430": "AE", "440": "JP", "450": "KR", "452": "VN", "454": "HK",
    "460": "CN", "470": "BD", "502": "MY", "505": "AU", "510": "ID",
    "515": "PH", "520": "TH", "525": "SG", "530": "NZ",
    # Africa
    "602": "EG", "604": "MA", "655": "ZA",
    # Central and South America
    "704": "GT", "706": "SV", "708": "HN", "710": "NI", "712": "CR",
    "714": "PA", "716": "PE", "722": "AR", "724": "BR", "730": "CL",
    "732": "CO", "734": "VE", "740": "EC", "748": "UY",
    # Language and multi-country groups
    "899": "Global", "907": "Global", "910": "DE", "913": "Global",
    "914": "Global", "915": "Global", "916": "Global", "918": "Global",
    "920": "DE", "922": "NL", "923": "Global", "924": "SE", "927": "Global",
    "930": "GR", "937": "FR", "940": "Global", "955": "Global",
    "969": "Global", "971": "ES", "973": "Global",
    # Regional four digit prefixes
    "2020": "GR", "2040": "NL", "2060": "BE", "2080": "FR", "2140": "ES",
    "2160": "HU", "2180": "BA", "2190": "HR", "2200": "RS", "2220": "IT",
    "2260": "RO", "2280": "CH", "2300": "CZ", "2310": "SK", "2320": "AT",
    "2348": "GB", "2349": "GB", "2350": "GB", "2380": "DK", "2400": "SE",
    "2410": "SE", "2411": "SE", "2412": "SE", "2415": "SE", "2420": "NO",
    "2440": "FI", "2460": "LT", "2470": "LV", "2480": "EE", "2500": "RU",
    "2501": "RU", "2502": "RU", "2503": "RU", "2504": "RU", "2505": "RU",
    "2506": "RU", "2507": "RU", "2550": "UA", "2555": "UA", "2559": "UA",
    "2570": "BY", "2590": "MD", "2599": "MD", "2600": "PL", "2620": "DE",
    "2630": "DE", "2640": "DE", "2650": "DE", "2680": "PT", "2700": "LU",
    "2720": "IE", "2740": "IS", "2780": "MT", "2800": "CY", "2820": "GE",
    "2830": "AM", "2840": "BG", "2860": "TR", "2880": "FO", "2920": "SM",
    "2930": "SI", "2940": "MK", "2950": "LI", "2970": "ME",
    "3020": "CA", "3100": "US", "3300": "PR", "3340": "MX",
    "4000": "AZ", "4010": "KZ", "4040": "IN", "4100": "PK", "4150": "LB",
    "4200": "SA", "4220": "OM", "4250": "IL", "4260": "BH", "4270": "QA",
    "4300": "AE", "4400": "JP", "4415": "JP", "4500": "KR", "4520": "VN",
    "4540": "HK", "4600": "CN", "4660": "TW", "4700": "BD", "5020": "MY",
    "5050": "AU", "5100": "ID", "5150": "PH", "5200": "TH", "5250": "SG",
    "5300": "NZ",
    "6020": "EG", "6040": "MA", "6470": "RE", "6471": "RE", "6550": "ZA",
    "7040": "GT", "7060": "SV", "7080": "HN", "7100": "NI", "7120": "CR",
    "7140": "PA", "7160": "PE", "7220": "AR", "7240": "BR", "7300": "CL",
    "7320": "CO", "7340": "VE", "7400": "EC", "7480": "UY",
    "9322": "Global", "9515": "Global", "9753": "Global", "9791": "Global",
    "9800": "Global", "9801": "Global", "9802": "Global", "9838": "Global",
}
