YES_ANSWERS = ('y', 'yes')
NO_ANSWERS = ('n', 'no')


def get_input() -> str:
    return input()


def prompt(prompt_message: str) -> bool:
    """Ask operator to confirm an action. Repeats the question until a valid answer is given."""
    print(prompt_message, end='')
    while True:
        choice = get_input().strip().lower()

        if choice in YES_ANSWERS:
            return True

        if choice in NO_ANSWERS:
            return False

        print('Please respond with [y or n]: ', end='')
