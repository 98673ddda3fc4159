from django.http import HttpResponse
from django.urls import path
from rest_framework.response import Response
from rest_framework.views import APIView

from django_surveillance.errors import ReportableError
from django_surveillance.reporter import get_reporter


def ok_view(request):
    return HttpResponse("OK")


def boom_view(request):
    raise ValueError("boom")


def abort_view(request):
    get_reporter().capture(ReportableError("charge failed", tags={"gateway": "test"}), abort=True)
    return HttpResponse("unreachable")


class BoomAPIView(APIView):
    def get(self, request):
        raise ValueError("api boom")


class AbortAPIView(APIView):
    def get(self, request):
        get_reporter().capture(ReportableError("api charge failed"), abort=True)
        return Response({"detail": "unreachable"})


urlpatterns = [
    path("ok/", ok_view),
    path("boom/", boom_view),
    path("abort/", abort_view),
    path("api/boom/", BoomAPIView.as_view()),
    path("api/abort/", AbortAPIView.as_view()),
]
