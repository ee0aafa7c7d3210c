from app.main import run_server

run_server()
