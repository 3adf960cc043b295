from capture.main import run

run()
