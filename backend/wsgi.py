# backend/wsgi.py
from sanctus import create_app

app = create_app()
