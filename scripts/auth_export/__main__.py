from scripts.auth_export.cli import main

main()
