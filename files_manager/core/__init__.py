SERVICE_NAME = "files_manager"
