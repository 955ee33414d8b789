# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Error taxonomy for ptexamples.

None of these are retried. They surface straight to the caller, and the CLI
maps them onto exit codes. A missing gradient during a manual weight update
is deliberately not an error (see training.optimizer.core.manual_sgd_step).
"""


class PtExamplesError(Exception):
    """Base for every error raised by ptexamples itself."""


class UnsupportedArityError(PtExamplesError, TypeError):
    """
    A model was called with a number of input tensors its forward() does
    not accept. Raised before any computation happens.
    """

    def __init__(self, model_name: str, expected: int, received: int) -> None:
        self.model_name = model_name
        self.expected = expected
        self.received = received
        super().__init__(
            f"{model_name}.forward() with {received} input tensor(s) is not supported; "
            f"expected exactly {expected}"
        )


class DeviceMismatchError(PtExamplesError, RuntimeError):
    """Tensors living on different devices were combined."""


class WeightLoadError(PtExamplesError):
    """A weight file does not match the model's layer names or shapes."""


class DatasetError(PtExamplesError):
    """Dataset files are missing from the data folder or malformed."""
