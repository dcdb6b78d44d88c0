"""State-space mappers: adapters between physical objects and a flat state vector.

A state-space vector holds every degree of freedom of the whole system. A mapper
owns no state vector; it only knows which components it reads and writes.

Contract
- to_object(state): read the mapper's components; never mutates `state`.
- from_object(dedx, obj) / from_vector(dedx, vector): ADD the components into
  `dedx`. Several error terms accumulate into the same buffer, so writes must
  superpose rather than overwrite. HarmonicVector3Mapper.from_gradients() adds
  parameter gradients the same way.
- is_valid_for_dimension(n): the mapper's components all lie below n.

Gradient buffers
- A writable 1-D floating numpy array (fast path), or
- any mutable sequence of reals, e.g. a list; its elements are updated in place.

Errors
- InvalidConfiguration for bad construction parameters (negative indices, ...).
- InvalidArgument for a non 1-D state, an unusable buffer, or a vector of the
  wrong dimension.
- StateIndexError when a state or buffer is too short.
"""
from __future__ import annotations

import math
import numbers
from abc import ABC, abstractmethod
from collections.abc import MutableSequence
from typing import Iterable, Sequence, Tuple, Union

import numpy as np

from timevarying.harmonic import HarmonicVector3
from .errors import InvalidArgument, InvalidConfiguration, StateIndexError

__all__ = [
    "ObjectStateSpaceMapper",
    "VectorStateSpaceMapper",
    "ContiguousVectorMapper",
    "Vector1StateSpaceMapper",
    "Vector3StateSpaceMapper",
    "IndexedVectorMapper",
    "TimeMapper",
    "HarmonicVector3Mapper",
    "GradientBuffer",
    "as_state",
    "as_gradient_buffer",
]

GradientBuffer = Union[np.ndarray, MutableSequence]


def as_state(state: object, name: str = "state") -> np.ndarray:
    """Coerce a state-space vector to a 1-D float array (no copy for float arrays)."""
    if state is None:
        raise InvalidArgument(f"{name} must not be None")
    arr = np.asarray(state, dtype=float)
    if arr.ndim != 1:
        raise InvalidArgument(f"{name} must be 1-D; got shape {arr.shape}")
    return arr


def as_gradient_buffer(dedx: object, name: str = "dedx") -> GradientBuffer:
    """Validate a gradient accumulation buffer; returns the caller's object itself."""
    if isinstance(dedx, np.ndarray):
        if dedx.ndim != 1:
            raise InvalidArgument(f"{name} must be 1-D; got shape {dedx.shape}")
        if not np.issubdtype(dedx.dtype, np.floating):
            raise InvalidArgument(f"{name} must have a floating dtype; got {dedx.dtype}")
        if not dedx.flags.writeable:
            raise InvalidArgument(f"{name} must be writeable")
        return dedx
    if not isinstance(dedx, MutableSequence):
        raise InvalidArgument(
            f"{name} must be a numpy array or a mutable sequence of reals; got {type(dedx).__name__}"
        )
    for k, x in enumerate(dedx):
        if isinstance(x, bool) or not isinstance(x, numbers.Real):
            raise InvalidArgument(f"{name}[{k}] must be a real number; got {x!r}")
    return dedx


def _accumulate(buf: GradientBuffer, indices: Sequence[int], values: np.ndarray) -> None:
    """buf[indices[k]] += values[k], with repeated indices accumulating."""
    if isinstance(buf, np.ndarray):
        np.add.at(buf, np.asarray(indices, dtype=np.intp), values)
    else:
        for i, v in zip(indices, values):
            buf[i] += float(v)


def _index(x: object, name: str) -> int:
    if isinstance(x, bool) or not isinstance(x, (int, np.integer)):
        raise InvalidConfiguration(f"{name} must be an integer; got {x!r}")
    i = int(x)
    if i < 0:
        raise InvalidConfiguration(f"{name} must be non-negative; got {i}")
    return i


class ObjectStateSpaceMapper(ABC):
    """Maps an object to (part of) a state-space vector."""

    @property
    @abstractmethod
    def minimum_state_space_dimension(self) -> int:
        """Smallest state-space length this mapper can be used with; positive."""

    def is_valid_for_dimension(self, n: int) -> bool:
        return self.minimum_state_space_dimension <= int(n)

    def _require_length(self, n: int) -> None:
        if not self.is_valid_for_dimension(n):
            raise StateIndexError(n, self.minimum_state_space_dimension)

    @abstractmethod
    def to_object(self, state: object):
        """Read the object from its components of `state`."""

    @abstractmethod
    def from_object(self, dedx: GradientBuffer, obj) -> None:
        """Add the state-space representation of `obj` into `dedx`."""


class VectorStateSpaceMapper(ObjectStateSpaceMapper):
    """Maps a fixed-dimension real vector to components of a state-space vector."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Number of vector components; fixed at construction."""

    @abstractmethod
    def component_index(self, i: int) -> int:
        """State-space component that holds vector component i."""

    @abstractmethod
    def from_vector(self, dedx: GradientBuffer, vector: object) -> None:
        """Add the components of `vector` into the mapped positions of `dedx`."""

    def from_object(self, dedx: GradientBuffer, obj) -> None:
        self.from_vector(dedx, obj)

    def _as_vector(self, vector: object) -> np.ndarray:
        if vector is None:
            raise InvalidArgument("vector must not be None")
        v = np.asarray(vector, dtype=float)
        if v.ndim == 0 and self.dimension == 1:
            v = v.reshape(1)
        if v.shape != (self.dimension,):
            raise InvalidArgument(f"vector must have shape ({self.dimension},); got {v.shape}")
        return v


class ContiguousVectorMapper(VectorStateSpaceMapper):
    """
    Maps a vector of `dimension` components to the consecutive state-space
    components index0, index0+1, ..., index0+dimension-1.
    """

    def __init__(self, index0: int, dimension: int) -> None:
        self._index0 = _index(index0, "index0")
        if isinstance(dimension, bool) or not isinstance(dimension, (int, np.integer)) or int(dimension) < 1:
            raise InvalidConfiguration(f"dimension must be an integer >= 1; got {dimension!r}")
        self._dimension = int(dimension)

    @property
    def index0(self) -> int:
        return self._index0

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def minimum_state_space_dimension(self) -> int:
        return self._index0 + self._dimension

    def component_index(self, i: int) -> int:
        if not (0 <= i < self._dimension):
            raise IndexError(f"component {i} out of range for dimension {self._dimension}")
        return self._index0 + i

    def to_object(self, state: object) -> np.ndarray:
        s = as_state(state)
        self._require_length(s.shape[0])
        return s[self._index0 : self._index0 + self._dimension].copy()

    def from_vector(self, dedx: GradientBuffer, vector: object) -> None:
        buf = as_gradient_buffer(dedx)
        v = self._as_vector(vector)
        self._require_length(len(buf))
        if isinstance(buf, np.ndarray):
            buf[self._index0 : self._index0 + self._dimension] += v
        else:
            _accumulate(buf, range(self._index0, self._index0 + self._dimension), v)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self._index0, self._dimension) == (other._index0, other._dimension)  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._index0, self._dimension))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(index0={self._index0}, dimension={self._dimension})"


class Vector1StateSpaceMapper(ContiguousVectorMapper):
    """Maps a 1D vector to the single state-space component index0."""

    def __init__(self, index0: int) -> None:
        super().__init__(index0, 1)

    def __repr__(self) -> str:
        return f"Vector1StateSpaceMapper(index0={self.index0})"


class Vector3StateSpaceMapper(ContiguousVectorMapper):
    """Maps a 3D vector (x, y, z) to state-space components index0..index0+2."""

    def __init__(self, index0: int) -> None:
        super().__init__(index0, 3)

    def __repr__(self) -> str:
        return f"Vector3StateSpaceMapper(index0={self.index0})"


class IndexedVectorMapper(VectorStateSpaceMapper):
    """Maps vector component i to the arbitrary state-space component indices[i]."""

    def __init__(self, indices: Iterable[int]) -> None:
        if indices is None:
            raise InvalidConfiguration("indices must not be None")
        # Copy before validating so later mutation by the caller has no effect.
        copy = tuple(indices)
        if len(copy) == 0:
            raise InvalidConfiguration("indices must not be empty")
        self._indices: Tuple[int, ...] = tuple(_index(i, f"indices[{k}]") for k, i in enumerate(copy))
        self._index_array = np.array(self._indices, dtype=np.intp)
        self._index_array.setflags(write=False)

    @property
    def indices(self) -> Tuple[int, ...]:
        return self._indices

    @property
    def dimension(self) -> int:
        return len(self._indices)

    @property
    def minimum_state_space_dimension(self) -> int:
        return max(self._indices) + 1

    def component_index(self, i: int) -> int:
        if not (0 <= i < len(self._indices)):
            raise IndexError(f"component {i} out of range for dimension {len(self._indices)}")
        return self._indices[i]

    def to_object(self, state: object) -> np.ndarray:
        s = as_state(state)
        self._require_length(s.shape[0])
        return s[self._index_array]

    def from_vector(self, dedx: GradientBuffer, vector: object) -> None:
        buf = as_gradient_buffer(dedx)
        v = self._as_vector(vector)
        self._require_length(len(buf))
        # repeated indices accumulate
        _accumulate(buf, self._indices, v)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexedVectorMapper):
            return NotImplemented
        return self._indices == other._indices

    def __hash__(self) -> int:
        return hash(("IndexedVectorMapper", self._indices))

    def __repr__(self) -> str:
        return f"IndexedVectorMapper(indices={list(self._indices)!r})"


class TimeMapper(ObjectStateSpaceMapper):
    """
    Maps a time (seconds) to the single state-space component index0, holding
    t / scale. The scale keeps time components commensurate with the others.
    """

    def __init__(self, index0: int, scale: float) -> None:
        self._index0 = _index(index0, "index0")
        try:
            s = float(scale)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration("scale must be a real number") from e
        if not (s > 0.0 and math.isfinite(s)):
            raise InvalidConfiguration(f"scale must be a positive finite float; got {s}")
        self._scale = s

    @property
    def index0(self) -> int:
        return self._index0

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def minimum_state_space_dimension(self) -> int:
        return self._index0 + 1

    def to_object(self, state: object) -> float:
        s = as_state(state)
        self._require_length(s.shape[0])
        return float(s[self._index0]) * self._scale

    def from_object(self, dedx: GradientBuffer, obj: float) -> None:
        buf = as_gradient_buffer(dedx)
        self._require_length(len(buf))
        buf[self._index0] += float(obj) / self._scale

    def __repr__(self) -> str:
        return f"TimeMapper(index0={self._index0}, scale={self._scale!r})"


class HarmonicVector3Mapper(ObjectStateSpaceMapper):
    """
    Maps a HarmonicVector3 to 20 consecutive state-space components:

        index0      we
        index0+1    wh
        index0+2    t0 (through a TimeMapper)
        index0+5    f0 (3 components)
        index0+8    f1
        index0+11   f2
        index0+14   f3 (cosine amplitude)
        index0+17   f4 (sine amplitude)
    """

    SIZE = 20

    def __init__(self, index0: int, time_scale: float) -> None:
        self._index0 = _index(index0, "index0")
        self.t0_mapper = TimeMapper(self._index0 + 2, time_scale)
        self.f0_mapper = Vector3StateSpaceMapper(self._index0 + 5)
        self.f1_mapper = Vector3StateSpaceMapper(self._index0 + 8)
        self.f2_mapper = Vector3StateSpaceMapper(self._index0 + 11)
        self.f3_mapper = Vector3StateSpaceMapper(self._index0 + 14)
        self.f4_mapper = Vector3StateSpaceMapper(self._index0 + 17)

    @property
    def index0(self) -> int:
        return self._index0

    @property
    def minimum_state_space_dimension(self) -> int:
        return self._index0 + self.SIZE

    def to_object(self, state: object) -> HarmonicVector3:
        s = as_state(state)
        self._require_length(s.shape[0])
        return HarmonicVector3(
            self.t0_mapper.to_object(s),
            self.f0_mapper.to_object(s),
            self.f1_mapper.to_object(s),
            self.f2_mapper.to_object(s),
            self.f3_mapper.to_object(s),
            self.f4_mapper.to_object(s),
            float(s[self._index0]),
            float(s[self._index0 + 1]),
        )

    def from_object(self, dedx: GradientBuffer, obj: HarmonicVector3) -> None:
        if not isinstance(obj, HarmonicVector3):
            raise InvalidArgument(f"obj must be a HarmonicVector3; got {type(obj).__name__}")
        buf = as_gradient_buffer(dedx)
        self._require_length(len(buf))
        buf[self._index0] += obj.we
        buf[self._index0 + 1] += obj.wh
        self.t0_mapper.from_object(buf, obj.t0)
        self.f0_mapper.from_vector(buf, obj.f0)
        self.f1_mapper.from_vector(buf, obj.f1)
        self.f2_mapper.from_vector(buf, obj.f2)
        self.f3_mapper.from_vector(buf, obj.f3)
        self.f4_mapper.from_vector(buf, obj.f4)

    def from_gradients(
        self,
        dedx: GradientBuffer,
        dedt0: float,
        dedf: Sequence[object],
        dedwe: float,
        dedwh: float,
    ) -> None:
        """
        Add the gradient of an energy with respect to the HarmonicVector3
        parameters into dedx.

        dedt0 is per second; the stored t0 component is t0 / time_scale, so it
        is multiplied by time_scale. dedf holds the five (3,) gradients for
        f0..f4.
        """
        if len(dedf) != 5:
            raise InvalidArgument(f"dedf must hold 5 vectors; got {len(dedf)}")
        buf = as_gradient_buffer(dedx)
        self._require_length(len(buf))
        buf[self._index0] += float(dedwe)
        buf[self._index0 + 1] += float(dedwh)
        buf[self.t0_mapper.index0] += float(dedt0) * self.t0_mapper.scale
        for mapper, g in zip(
            (self.f0_mapper, self.f1_mapper, self.f2_mapper, self.f3_mapper, self.f4_mapper), dedf
        ):
            mapper.from_vector(buf, g)

    def __repr__(self) -> str:
        return f"HarmonicVector3Mapper(index0={self._index0}, time_scale={self.t0_mapper.scale!r})"
