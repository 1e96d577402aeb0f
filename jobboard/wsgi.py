from jobboard.app import create_app
from jobboard.config import PORT

app = create_app()

if __name__ == "__main__":
    # the reloader would start a second cleanup scheduler
    app.run(host="0.0.0.0", port=PORT, debug=True, use_reloader=False)
