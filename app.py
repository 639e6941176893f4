"""Main entry point for the application."""

from devconnect import create_app

app = create_app()


@app.route("/health")
def health_check():
    """Perform a simple health check."""
    return "OK", 200


@app.route("/")
def index():
    return {"message": "Welcome to DevConnect Backend!"}


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=5000, threaded=True)  # nosec
