from helm_audit.cli.app import main

main()
