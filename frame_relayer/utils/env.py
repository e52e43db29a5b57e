import os


def from_file_or_env(env_name: str, default: str | None = None) -> str | None:
    """
    Secrets could be mounted as files. `${env_name}_FILE` takes precedence over `${env_name}`.
    """
    filepath_env = f"{env_name}_FILE"
    if filepath := os.getenv(filepath_env):
        if not os.path.exists(filepath):
            raise ValueError(f'File {filepath} does not exist. Fix {filepath_env} variable or remove it.')

        with open(filepath) as f:
            return f.read().strip()

    return os.getenv(env_name, default)
