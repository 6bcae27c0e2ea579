from xmljsongen.xmljsongen import main

if __name__ == "__main__":
    main()
