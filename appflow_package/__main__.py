from appflow_package.cli.package import main

main()
