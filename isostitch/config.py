"""
Configuration of the isoline pipeline.

All the tolerances and steps that used to be spread over module constants are
collected in one validated, immutable model that is passed to `compute_isolines`.
"""
from typing import Literal, Optional

from pydantic import BaseModel, field_validator, model_validator


class ContourConfig(BaseModel):
    """Tolerances and steps used by every stage of the pipeline."""

    model_config = {
        'frozen': True,
        'extra': 'forbid',
    }

    # level selection
    level_step: float = 1_000_000
    # levels that are a multiple of this step are always kept
    heavy_step: float = 5_000_000

    # 'rings' traces marching squares rings and stitches them, 'columns' sweeps the year columns
    method: Literal['rings', 'columns'] = 'rings'

    # geometric tolerances
    boundary_eps: float = 1e-6
    point_eps: float = 1e-9
    signature_decimals: int = 6

    # jump splitting, in multiples of one grid step
    jump_year_mult: float = 1.1
    jump_age_mult: float = 1.8
    # optional split at sharp turns (degrees)
    turn_split_angle: Optional[float] = None

    # stitching, in grid cells
    join_tol_cells: float = 0.5
    boundary_tol_factor: float = 0.25
    cos_threshold: float = 0.85

    # age-zero endpoint re-assignment, in year steps
    age0_tol_cells: float = 0.75

    # filtering of non-heavy levels
    min_run_points: int = 4
    min_bbox_cells: float = 0.25

    # column tracer
    column_join_age_steps: float = 2
    column_optimal_pairing: bool = True

    # number of threads used to process levels
    workers: int = 1

    @field_validator('level_step', 'heavy_step', 'boundary_eps', 'point_eps', 'jump_year_mult',
                     'jump_age_mult', 'join_tol_cells', 'boundary_tol_factor', 'age0_tol_cells',
                     'column_join_age_steps')
    @classmethod
    def validate_positive(cls, v):
        v = float(v)
        if not v > 0:
            raise ValueError('Value must be strictly positive')
        return v

    @field_validator('min_bbox_cells')
    @classmethod
    def validate_non_negative(cls, v):
        v = float(v)
        if v < 0:
            raise ValueError('Value must not be negative')
        return v

    @field_validator('cos_threshold')
    @classmethod
    def validate_cosine(cls, v):
        v = float(v)
        if not -1.0 <= v <= 1.0:
            raise ValueError('Cosine threshold must be in the range [-1, 1]')
        return v

    @field_validator('turn_split_angle')
    @classmethod
    def validate_angle(cls, v):
        if v is None:
            return v
        v = float(v)
        if not 0.0 < v < 180.0:
            raise ValueError('Turn split angle must be in the range (0, 180) degrees')
        return v

    @field_validator('min_run_points', 'workers', 'signature_decimals')
    @classmethod
    def validate_count(cls, v):
        if v < 1:
            raise ValueError('Value must be at least 1')
        return v

    @model_validator(mode='after')
    def validate_steps(self):
        if self.heavy_step < self.level_step:
            raise ValueError('heavy_step must not be smaller than level_step')
        return self
