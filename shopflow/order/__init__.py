"""Order models, storage, service logic, HTTP handlers and messaging."""