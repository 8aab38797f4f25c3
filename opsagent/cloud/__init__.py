"""cloud — cloud-provider API clients used before or after running CLIs."""
