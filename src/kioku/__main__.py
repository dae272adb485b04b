from kioku.interface.cli import app

app()
