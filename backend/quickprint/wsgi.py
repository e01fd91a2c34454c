from quickprint import create_app

app = create_app()
