"""JSON helpers and the generic CRUD views shared by the API apps."""
import json
import logging
import traceback
from datetime import date, datetime, time
from decimal import Decimal

from django import forms
from django.conf import settings
from django.db import DatabaseError
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


class InvalidBody(ValueError):
    pass


def read_json(request):
    """Decode a JSON object body, raising InvalidBody otherwise."""
    try:
        payload = json.loads(request.body.decode("utf-8") or "null")
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidBody(str(e)) from e
    if not isinstance(payload, dict):
        raise InvalidBody("Request body must be a JSON object")
    return payload


def to_json_value(value):
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def serialize(instance):
    # Foreign keys render under their column name (user_id, session_id)
    return {
        field.attname: to_json_value(getattr(instance, field.attname))
        for field in instance._meta.concrete_fields
    }


def accept_column_names(model, payload):
    """Let clients send ``user_id`` where the form field is ``user``."""
    data = dict(payload)
    for field in model._meta.concrete_fields:
        if field.is_relation and field.attname in data and field.name not in data:
            data[field.name] = data.pop(field.attname)
    return data


class ApiModelForm(forms.ModelForm):
    """ModelForm for JSON bodies: fields with a model default may be omitted."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            if self._meta.model._meta.get_field(name).has_default():
                field.required = False

    def clean(self):
        cleaned_data = super().clean()
        for name in self.fields:
            model_field = self._meta.model._meta.get_field(name)
            # Checkboxes read a missing key as False
            if model_field.has_default() and name not in self.data:
                cleaned_data[name] = model_field.get_default()
        return cleaned_data


def error_payload(message, exc=None, **extra):
    body = {"success": False, "message": message, **extra}
    if settings.DEBUG and exc is not None:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def form_errors(form):
    return {field: [str(e) for e in errors] for field, errors in form.errors.items()}


@method_decorator(csrf_exempt, name="dispatch")
class ModelResource(View):
    """
    List/create (collection) and retrieve/update/delete (item) endpoints
    for a single model, validated through a ModelForm.

    Subclasses set ``model``, ``form_class`` and ``label`` (the plural
    name used in messages, e.g. "users").
    """

    model = None
    form_class = None
    label = None

    @property
    def singular(self):
        return self.model._meta.verbose_name

    def not_found(self):
        return JsonResponse({"error": f"{self.label} not found"}, status=404)

    def get_object(self, pk):
        return self.model.objects.filter(pk=pk).first()

    def get(self, request, pk=None):
        if pk is not None:
            instance = self.get_object(pk)
            if instance is None:
                return self.not_found()
            return JsonResponse(serialize(instance))

        queryset = self.model.objects.order_by("pk")
        limit = request.GET.get("limit")
        if limit:
            try:
                limit = int(limit)
            except ValueError:
                return JsonResponse({"error": "limit must be an integer"}, status=400)
            if limit > 0:
                queryset = queryset[:limit]
        data = [serialize(obj) for obj in queryset]
        if not data:
            return self.not_found()
        return JsonResponse(data, safe=False)

    def post(self, request, pk=None):
        if pk is not None:
            return JsonResponse({"error": "Method not allowed"}, status=405)
        try:
            payload = read_json(request)
        except InvalidBody as e:
            return JsonResponse({"error": f"Invalid request body: {e}"}, status=400)

        form = self.form_class(accept_column_names(self.model, payload))
        if not form.is_valid():
            return JsonResponse({"error": form_errors(form)}, status=400)
        try:
            instance = form.save()
        except DatabaseError as e:
            logger.exception("Failed to create %s", self.singular)
            return JsonResponse({"error": str(e)}, status=400)
        return JsonResponse(
            {"msg": f"{self.singular} created successfully", "data": serialize(instance)},
            status=201,
        )

    def put(self, request, pk=None):
        if pk is None:
            return JsonResponse({"error": "Method not allowed"}, status=405)
        instance = self.get_object(pk)
        if instance is None:
            return self.not_found()
        try:
            payload = read_json(request)
        except InvalidBody as e:
            return JsonResponse({"error": f"Invalid request body: {e}"}, status=400)

        # Fields missing from the body keep their stored value
        data = {
            **model_to_dict(instance, fields=self.form_class._meta.fields),
            **accept_column_names(self.model, payload),
        }
        form = self.form_class(data, instance=instance)
        if not form.is_valid():
            return JsonResponse({"error": form_errors(form)}, status=400)
        try:
            instance = form.save()
        except DatabaseError as e:
            logger.exception("Failed to update %s %s", self.singular, pk)
            return JsonResponse({"error": str(e)}, status=400)
        return JsonResponse({"msg": f"{self.singular} updated successfully", "data": serialize(instance)})

    def delete(self, request, pk=None):
        if pk is None:
            return JsonResponse({"error": "Method not allowed"}, status=405)
        instance = self.get_object(pk)
        if instance is None:
            return self.not_found()
        try:
            instance.delete()
        except DatabaseError as e:
            logger.exception("Failed to delete %s %s", self.singular, pk)
            return JsonResponse({"error": str(e)}, status=400)
        return JsonResponse({"msg": f"{self.singular} deleted successfully"})
