# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
ptexamples training infrastructure package.

Subsystems:
  - engine: training loop, evaluation loop, epoch driver, experiment dirs
  - optimizer: SGD/Adam factory and manual update step
  - scheduler: step-decay learning rate schedule
  - checkpoint: atomic, strict weight save/load
  - metrics: accuracy and loss accounting
"""
