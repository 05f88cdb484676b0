from cadence.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
