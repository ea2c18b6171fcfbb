import json

from flask import current_app, request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import StringField, PasswordField, TextAreaField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, AnyOf

from solvefy.decorators import get_current_user
from solvefy.errors import ValidationError

VIDEO_TYPES = ('youtube', 'uploaded', 'vimeo')


class JsonForm(FlaskForm):
    """Form bound to a JSON request body (see ``load_form``).

    The API has no browser forms, so CSRF tokens are not used.
    """

    class Meta:
        csrf = False

    def validated_data(self, also_required=()):
        """Validate and return the submitted fields as a dict.

        Only fields present in the body are returned. Raises ValidationError
        naming every missing required field, or the first other error.
        ``also_required`` names Optional fields that must be sent this time.
        """
        valid = self.validate()
        missing = [
            name for name, field in self._fields.items()
            if not _has_value(field.data) and (
                name in also_required
                or field.errors and any(isinstance(v, DataRequired) for v in field.validators)
            )
        ]
        if missing:
            raise ValidationError(fields=missing)
        if not valid:
            name, errors = next(iter(self.errors.items()))
            raise ValidationError(f'{name}: {errors[0]}')

        return {name: field.data for name, field in self._fields.items() if field.raw_data}


def _has_value(value):
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def _form_value(value):
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def load_form(form_class):
    """Bind ``form_class`` to the current JSON body and validate it.

    Values are passed to WTForms as text (null becomes an empty string) so
    numeric ids and null optionals behave like ordinary form input. Without
    a signed-in user the acting ``userId`` has to come from the body, so it
    is reported together with the other missing fields.
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    formdata = ImmutableMultiDict({k: _form_value(v) for k, v in body.items()})
    form = form_class(formdata=formdata)

    also_required = ()
    if ('userId' in form._fields and not get_current_user().is_authenticated
            and not current_app.config.get('REQUIRE_SESSION')):
        also_required = ('userId',)
    return form.validated_data(also_required)


def _required(name):
    return DataRequired(message=f'{name} is required')


# -- Auth ----------------------------------------------------------------

class LoginForm(JsonForm):
    username = StringField('Username', validators=[_required('username')])
    password = PasswordField('Password', validators=[_required('password')])


class RegistrationForm(JsonForm):
    username = StringField('Username', validators=[_required('username'), Length(min=3, max=40, message='must be 3-40 characters')])
    password = PasswordField('Password', validators=[_required('password'), Length(min=6, message='must be at least 6 characters')])
    fullName = StringField('Full name', validators=[Optional(), Length(max=120)])


class SubmitAnswerForm(JsonForm):
    userId = StringField('User', validators=[_required('userId')])
    questionId = StringField('Question', validators=[_required('questionId')])
    userAnswer = TextAreaField('Answer', validators=[_required('userAnswer')])


# -- Catalog -------------------------------------------------------------

class SubjectForm(JsonForm):
    name = StringField('Name', validators=[_required('name'), Length(max=200)])
    slug = StringField('Slug', validators=[Optional(), Length(max=200)])
    icon = StringField('Icon', validators=[Optional()])
    description = TextAreaField('Description', validators=[Optional()])
    sortOrder = IntegerField('Sort order', validators=[Optional()])
    userId = StringField('User', validators=[Optional()])


class GradeForm(JsonForm):
    subjectId = StringField('Subject', validators=[_required('subjectId')])
    name = StringField('Name', validators=[_required('name'), Length(max=200)])
    slug = StringField('Slug', validators=[Optional(), Length(max=200)])
    level = IntegerField('Level', validators=[Optional()])
    description = TextAreaField('Description', validators=[Optional()])
    sortOrder = IntegerField('Sort order', validators=[Optional()])
    userId = StringField('User', validators=[Optional()])


class BookForm(JsonForm):
    gradeId = StringField('Grade', validators=[_required('gradeId')])
    name = StringField('Name', validators=[_required('name'), Length(max=300)])
    publisher = StringField('Publisher', validators=[Optional(), Length(max=200)])
    description = TextAreaField('Description', validators=[Optional()])
    coverImageUrl = StringField('Cover image', validators=[Optional()])
    publicationYear = IntegerField('Publication year', validators=[Optional()])
    sortOrder = IntegerField('Sort order', validators=[Optional()])
    userId = StringField('User', validators=[Optional()])


class LessonForm(JsonForm):
    bookId = StringField('Book', validators=[_required('bookId')])
    name = StringField('Name', validators=[_required('name'), Length(max=300)])
    content = TextAreaField('Content', validators=[Optional()])
    description = TextAreaField('Description', validators=[Optional()])
    sortOrder = IntegerField('Sort order', validators=[Optional()])
    userId = StringField('User', validators=[Optional()])


# -- Q&A -----------------------------------------------------------------

class QuestionForm(JsonForm):
    lessonId = StringField('Lesson', validators=[_required('lessonId')])
    title = StringField('Title', validators=[_required('title'), Length(max=300)])
    content = TextAreaField('Content', validators=[_required('content')])
    userId = StringField('User', validators=[Optional()])


class QuestionUpdateForm(JsonForm):
    title = StringField('Title', validators=[_required('title'), Length(max=300)])
    content = TextAreaField('Content', validators=[_required('content')])
    userId = StringField('User', validators=[Optional()])


class AnswerForm(JsonForm):
    questionId = StringField('Question', validators=[_required('questionId')])
    answer = TextAreaField('Answer', validators=[_required('answer')])
    explain = TextAreaField('Explanation', validators=[Optional()])
    videoUrl = StringField('Video URL', validators=[Optional()])
    videoType = StringField('Video type', validators=[Optional(), AnyOf(VIDEO_TYPES)])
    userId = StringField('User', validators=[Optional()])


class AnswerUpdateForm(JsonForm):
    answer = TextAreaField('Answer', validators=[_required('answer')])
    explain = TextAreaField('Explanation', validators=[Optional()])
    videoUrl = StringField('Video URL', validators=[Optional()])
    videoType = StringField('Video type', validators=[Optional(), AnyOf(VIDEO_TYPES)])
    userId = StringField('User', validators=[Optional()])


# -- Per-user state ------------------------------------------------------

class BookmarkForm(JsonForm):
    bookId = StringField('Book', validators=[_required('bookId')])
    userId = StringField('User', validators=[Optional()])


class ProgressForm(JsonForm):
    lessonId = StringField('Lesson', validators=[_required('lessonId')])
    userId = StringField('User', validators=[Optional()])
