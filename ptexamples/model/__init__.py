# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
ptexamples model package.

  - TextClassificationModel: EmbeddingBag → Linear (AG_NEWS)
  - MnistModel: two conv layers + two linear layers (MNIST, Fashion-MNIST)
  - LinearClassifier: one linear layer

All of them implement the ClassifierBase contract in interfaces.py.
"""
