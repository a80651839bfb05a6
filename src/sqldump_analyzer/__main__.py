from sqldump_analyzer.cli.commands import run

if __name__ == "__main__":
    run()
