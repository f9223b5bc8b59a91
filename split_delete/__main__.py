from split_delete.main import cli

cli()
