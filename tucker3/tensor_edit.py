"""
Title:
Authors:
- Lee Sael (sael@ajou.ac.kr) Ajou University
- Sang Suk Lee, Ajou University
- HeaWon Moon, Ajou University

This software may be used only for research evaluation purposes.
For other purposes (e.g., commercial), please contact the authors.
"""

import tensorly as tl
import numpy as np

from tucker3.exceptions import ShapeMismatchError

'''unfold/fold originally copied from Tensorly and modified to Fortran ordering'''


def unfold_F(tensor, mode):
    """
    Returns the mode-`mode` unfolding of `tensor` with modes starting at `0`.

    The remaining axes keep their natural order and the lower-numbered one
    varies fastest along the columns, i.e. for a 3-tensor

    * mode 0 (lateral):    column ``i2 + I2 * i3``
    * mode 1 (frontal):    column ``i1 + I1 * i3``
    * mode 2 (horizontal): column ``i1 + I1 * i2``

    Parameters
    ----------
    tensor : ndarray
    mode : int
           indexing starts at 0, therefore mode is in ``range(0, tensor.ndim)``

    Returns
    -------
    ndarray
        unfolded_tensor of shape ``(tensor.shape[mode], -1)``
    """
    return tl.reshape(tl.moveaxis(tensor, mode, 0), (tensor.shape[mode], -1), 'F')


def fold_F(unfolded_tensor, mode, shape):
    """
    Refolds the mode-`mode` unfolding into a tensor of shape `shape`.
    Exact inverse of :func:`unfold_F`.

    Parameters
    ----------
    unfolded_tensor : ndarray
        unfolded tensor of shape ``(shape[mode], -1)``
    mode : int
        the mode of the unfolding
    shape : tuple
        shape of the original tensor before unfolding

    Returns
    -------
    ndarray
        folded_tensor of shape `shape`
    """
    full_shape = list(shape)
    mode_dim = full_shape.pop(mode)
    full_shape.insert(0, mode_dim)
    return tl.moveaxis(tl.reshape(unfolded_tensor, full_shape, 'F'), 0, mode)


def matricize(data, mode):
    if tl.ndim(data) != 3:
        raise ShapeMismatchError(f"matricization expects a 3-tensor, got shape {tl.shape(data)}")
    if mode not in (0, 1, 2):
        raise ValueError(f"mode must be 0, 1 or 2, got {mode}")
    return unfold_F(data, mode)


def lateral_matricization(data):
    """I1 x (I2*I3) unfolding, used for the first basis."""
    return matricize(data, 0)


def frontal_matricization(data):
    """I2 x (I1*I3) unfolding, used for the second basis."""
    return matricize(data, 1)


def horizontal_matricization(data):
    """I3 x (I1*I2) unfolding, used for the third basis."""
    return matricize(data, 2)


def mode_dot_F(tensor, matrix, mode, transpose=False):
    """
    n-mode product of a tensor and a matrix at the specified mode

    Mathematically: :math:`\\text{tensor} \\times_{\\text{mode}} \\text{matrix}`

    Parameters
    ----------
    tensor : ndarray
        tensor of shape ``(i_1, ..., i_k, ..., i_N)``
    matrix : ndarray
        2D array of shape ``(J, i_k)``
    mode : int
    transpose : bool, default is False
        If True, the matrix is transposed.

    Returns
    -------
    ndarray
        `mode`-mode product of shape :math:`(i_1, ..., i_{k-1}, J, i_{k+1}, ..., i_N)`
    """
    if tl.ndim(matrix) != 2:
        raise ValueError(
            f"Can only take n_mode_product with a matrix. Provided array of dimension {tl.ndim(matrix)}."
        )
    dim = 0 if transpose else 1
    if matrix.shape[dim] != tensor.shape[mode]:
        raise ShapeMismatchError(
            f"shapes {tensor.shape} and {matrix.shape} not aligned in mode-{mode} multiplication: "
            f"{tensor.shape[mode]} (mode {mode}) != {matrix.shape[dim]} (dim {dim} of matrix)"
        )
    if transpose:
        matrix = tl.transpose(matrix)

    new_shape = list(tensor.shape)
    new_shape[mode] = matrix.shape[0]

    res = tl.dot(matrix, unfold_F(tensor, mode))
    return fold_F(res, mode, new_shape)


def multi_mode_dot_F(tensor, matrix_list, modes=None, transpose=False):
    """
    n-mode product of a tensor and several matrices over several modes

    Parameters
    ----------
    tensor : ndarray
    matrix_list : list of matrices of length ``tensor.ndim``
    modes : None or int list, optional, default is None
    transpose : bool, optional, default is False
        If True, the matrices in the list are transposed.

    Returns
    -------
    ndarray
        tensor times each matrix in the list at mode `mode`
    """
    if modes is None:
        modes = range(len(matrix_list))

    res = tensor
    # Order of mode dots doesn't matter for different modes
    for matrix, mode in sorted(zip(matrix_list, modes), key=lambda x: x[1]):
        res = mode_dot_F(res, matrix, mode, transpose=transpose)
    return res


def reconstruction_error(data, approximation, relative=False):
    """Frobenius norm of ``data - approximation``, optionally over ``||data||``."""
    data = np.asarray(data, dtype=np.float64)
    approximation = np.asarray(approximation, dtype=np.float64)
    if data.shape != approximation.shape:
        raise ShapeMismatchError(
            f"cannot compare tensors of shape {data.shape} and {approximation.shape}")
    error = tl.norm(data - approximation)
    if relative:
        norm = tl.norm(data)
        if norm > 0:
            error = error / norm
    return float(error)
