from pictolaunch.main import main

main()
