from vql_console.cli import app

app()
