from pi.menu.cli import main

main()
