from qsgen.cli import app

app(prog_name="qsgen")
