from typing import Callable, Iterable

AFFIRMATIVE_ANSWERS = ("y",)


def ask_confirmation(
    prompt: str,
    input_func: Callable[[str], str] = input,
    affirmative: Iterable[str] = AFFIRMATIVE_ANSWERS,
) -> bool:
    """Block for one line of input; anything outside `affirmative` declines."""
    try:
        answer = input_func(prompt)
    except EOFError:
        return False
    accepted = {token.lower() for token in affirmative}
    return answer.strip().lower() in accepted
