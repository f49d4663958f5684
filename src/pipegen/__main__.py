from pipegen.cli.main import app

app()
