import numbers

import numpy as np
import toolviper.utils.logger as logger


def check_params(
    parm_dict,
    string_key,
    acceptable_data_types,
    acceptable_data=None,
    acceptable_range=None,
    list_acceptable_data_types=None,
    list_len=None,
    default=None,
):
    """

    Parameters
    ----------
    parm_dict : dict
        The dictionary in which the a parameter will be checked
    string_key : str
        The key of the parameter to check
    acceptable_data_types : list
        A list of acceptable data types for the parameter. ``type(None)`` may
        be included to allow an explicit None.
    acceptable_data : list
        A list of acceptable values for the parameter
    acceptable_range : list
        A list of two elements specifying the acceptable range for the parameter
    list_acceptable_data_types : list
        A list of acceptable data types for list elements
    list_len : int
        If list_len is -1 than the list can be any length.
    default :
        Value assigned when the parameter is missing. If None, the parameter
        is required.

    Returns
    -------
    parm_passed : bool

    """

    if string_key not in parm_dict:
        if default is not None:
            parm_dict[string_key] = default
            return True
        logger.error("Parameter " + string_key + " must be specified.")
        return False

    value = parm_dict[string_key]

    if value is None:
        if type(None) in acceptable_data_types:
            return True
        logger.error("Parameter " + string_key + " can not be None.")
        return False

    if not any(isinstance(value, adt) for adt in acceptable_data_types):
        logger.error(
            "Parameter "
            + string_key
            + " must be of type "
            + str(acceptable_data_types)
            + ", got "
            + str(type(value))
            + "."
        )
        return False

    is_sequence = any(
        t in acceptable_data_types for t in (list, tuple, np.ndarray)
    ) and isinstance(value, (list, tuple, np.ndarray))

    if is_sequence:
        if np.ndim(value) != 1:
            logger.error("Parameter " + string_key + " must be one dimensional.")
            return False
        if (len(value) != list_len) and (list_len != -1):
            logger.error(
                "Parameter "
                + string_key
                + " must be a list of "
                + str(list_acceptable_data_types)
                + " and length "
                + str(list_len)
                + ". Wrong length."
            )
            return False
        for element in value:
            if list_acceptable_data_types is not None and not any(
                isinstance(element, lt) for lt in list_acceptable_data_types
            ):
                logger.error(
                    "Parameter "
                    + string_key
                    + " must be a list of "
                    + str(list_acceptable_data_types)
                    + ". Wrong type of "
                    + str(type(element))
                )
                return False
            if not _check_value(string_key, element, acceptable_data, acceptable_range):
                return False
        return True

    return _check_value(string_key, value, acceptable_data, acceptable_range)


def _check_value(string_key, value, acceptable_data, acceptable_range):
    if acceptable_data is not None:
        if not (value in acceptable_data):
            logger.error(
                "Invalid "
                + string_key
                + ". Can only be one of "
                + str(acceptable_data)
                + "."
            )
            return False

    if acceptable_range is not None:
        if not isinstance(value, numbers.Real) or (
            (value < acceptable_range[0]) or (value > acceptable_range[1])
        ):
            logger.error(
                "Invalid "
                + string_key
                + ". Must be within the range "
                + str(acceptable_range)
                + "."
            )
            return False

    return True
