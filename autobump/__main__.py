from autobump.cli.app import main

main()
