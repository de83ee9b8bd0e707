"""Shared building blocks: JSON HTTP routing, HTTP errors, user-ID auth and transaction context."""