from src.shift_pay.shift_pay.main import create_app

app = create_app()


if __name__ == "__main__":
    # One worker thread: ticks and commands must never interleave.
    app.run(debug=app.config.get("DEBUG", False), threaded=False, use_reloader=False)
