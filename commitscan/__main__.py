from commitscan.cli import main

main()
