from forgewright.cli.app import main

main()
