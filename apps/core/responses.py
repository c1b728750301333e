from rest_framework import status
from rest_framework.response import Response

from .exceptions import ErrorKind


ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorKind.SELF_SHARE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ALREADY_RESERVED: status.HTTP_409_CONFLICT,
    ErrorKind.ALREADY_PURCHASED: status.HTTP_409_CONFLICT,
    ErrorKind.NO_RESERVATION: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.EXPIRED: status.HTTP_410_GONE,
    ErrorKind.EXHAUSTED: status.HTTP_410_GONE,
}


def error_response(result):
    """Render a failed ServiceResult."""
    if result.error == ErrorKind.NOT_FOUND:
        # Same body as a missing resource, whatever the underlying reason.
        return Response({'error': 'Not found', 'code': ErrorKind.NOT_FOUND},
                        status=status.HTTP_404_NOT_FOUND)

    body = {'error': result.message, 'code': result.error}
    if result.context:
        body['detail'] = {key: str(value) if value is not None else None
                          for key, value in result.context.items()}
    return Response(body, status=ERROR_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST))


def result_response(result, serializer_class=None, *, context=None,
                    success_status=status.HTTP_200_OK, many=False):
    """Render a ServiceResult, serializing the success payload if asked."""
    if not result.ok:
        return error_response(result)

    if serializer_class is None:
        data = result.value
    else:
        data = serializer_class(result.value, many=many, context=context or {}).data

    if data is None:
        return Response(status=status.HTTP_204_NO_CONTENT)
    return Response(data, status=success_status)
