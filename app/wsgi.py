from app.usermgmt import create_app

app = create_app()
