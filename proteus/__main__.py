from proteus.cli import main

main()
