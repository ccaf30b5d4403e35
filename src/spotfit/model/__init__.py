from .spot_model import make_spot_gauss2d
