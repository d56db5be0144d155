from team_board.app.main import create_app

app = create_app()
