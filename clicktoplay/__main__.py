from clicktoplay.cli import main

main()
