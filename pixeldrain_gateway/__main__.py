from pixeldrain_gateway.app import main

main()
