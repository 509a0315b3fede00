"""Dataset functions for distapply examples and testing."""

from pathlib import Path

import pandas as pd

__all__ = ["load_mtcars"]

MTCARS_COLUMNS = ["mpg", "cyl", "disp", "hp", "drat", "wt", "qsec", "vs", "am", "gear", "carb"]


def load_mtcars(index=False) -> pd.DataFrame:
    """Load the Motor Trend car road tests dataset.

    The data were extracted from the 1974 *Motor Trend* US magazine and
    cover fuel consumption and ten aspects of automobile design and
    performance for 32 automobiles (1973-74 models).

    Parameters
    ----------
    index : bool, default False
        If True, return the car model as a leading ``model`` column instead
        of the row index.

    Returns
    -------
    pd.DataFrame
        A DataFrame with 32 rows and the following float64 columns:

        - *mpg*: Miles per US gallon
        - *cyl*: Number of cylinders
        - *disp*: Displacement (cubic inches)
        - *hp*: Gross horsepower
        - *drat*: Rear axle ratio
        - *wt*: Weight (1000 lbs)
        - *qsec*: Quarter mile time
        - *vs*: Engine (0 = V-shaped, 1 = straight)
        - *am*: Transmission (0 = automatic, 1 = manual)
        - *gear*: Number of forward gears
        - *carb*: Number of carburetors

    References
    ----------
    .. [1] Henderson, H. V., & Velleman, P. F. (1981). Building multiple
        regression models interactively. Biometrics, 37, 391-411.
    """
    data_path = Path(__file__).parent / "data" / "mtcars.csv"

    if not data_path.exists():
        raise FileNotFoundError(
            f"mtcars data file not found at {data_path}. "
            "Please ensure the data file is included in the distapply installation."
        )

    mtcars = pd.read_csv(data_path, index_col="model")
    mtcars = mtcars[MTCARS_COLUMNS].astype("float64")

    if index:
        return mtcars.reset_index()
    return mtcars
