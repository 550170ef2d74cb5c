from flask_wtf import FlaskForm
from wtforms import DecimalField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange

from aggregates import sort_standards

# Standards offered when adding a student
STANDARD_CHOICES = [str(n) for n in range(5, 13)]


class LoginForm(FlaskForm):
    password = PasswordField('Password', validators=[DataRequired()])


class StudentForm(FlaskForm):
    name = StringField('Full Name', validators=[DataRequired(), Length(max=200)])
    whatsapp = StringField('WhatsApp', validators=[DataRequired(), Length(max=30)])
    standard = SelectField('Standard', validators=[DataRequired()], default='5')
    total_fee = DecimalField('Total Fee', validators=[InputRequired(), NumberRange(min=0)])
    paid_fee = DecimalField('Paid Amount', validators=[InputRequired(), NumberRange(min=0)])

    def __init__(self, *args, extra_standards=(), **kwargs):
        super().__init__(*args, **kwargs)
        # Keep a student's existing class selectable even if it is outside the usual range
        standards = sort_standards(list(STANDARD_CHOICES) + [s for s in extra_standards if s])
        self.standard.choices = [(s, f'{s}th') for s in standards]

    def student_fields(self):
        return {
            'name': self.name.data.strip(),
            'whatsapp': self.whatsapp.data.strip(),
            'standard': self.standard.data,
            'total_fee': self.total_fee.data,
            'paid_fee': self.paid_fee.data,
        }


class SettingsForm(FlaskForm):
    academy_name = StringField('Academy Name', validators=[DataRequired(), Length(max=200)])
