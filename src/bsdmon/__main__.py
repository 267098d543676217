from bsdmon.app import main

main()
