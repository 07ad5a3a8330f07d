"""Application layer: ports, DTOs and the preview/execute use cases."""
