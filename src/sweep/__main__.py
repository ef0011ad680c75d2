from sweep.cli.app import app

app()
