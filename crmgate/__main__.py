from crmgate.cli import main

main()
