from inkmatch.cli import main

main()
