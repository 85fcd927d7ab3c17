from app.jokes import create_app

app = create_app()
