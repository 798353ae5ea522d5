from knife_core.cli.knife import main

if __name__ == "__main__":
    main()
