from ocp_monitor_web.app_factory import create_app

if __name__ == "__main__":
    app = create_app()
    # threaded: a run blocks its request for up to the script timeout
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.config["DEBUG"], threaded=True)
