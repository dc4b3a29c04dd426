from exporter.server import main

main()
