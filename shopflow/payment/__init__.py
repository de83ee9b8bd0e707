"""Account models, storage, payment logic, HTTP handlers, inbox handler and messaging."""