from fee_claimer.core.main import main

if __name__ == '__main__':
    main()
