"""Path-prefix reverse proxy in front of the backend services, and its command."""