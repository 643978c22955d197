from cdtools.cli.app import main

main()
