"""Order service: domain, in-memory repository, convertors, handlers, HTTP logic and paid-event consumer."""