"""Infrastructure adapters: Kubernetes, AWS and shared constants."""
