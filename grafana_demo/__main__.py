from grafana_demo.main import main

if __name__ == '__main__':
    main()
