from jenkinsfile_ls.lsp.server import main

main()
