from lastheard.cli import main

main(prog_name="lastheard")
