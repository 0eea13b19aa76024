from forgepub.cli.app import main

main()
